# Run from project root: python -m research_agent "your question"

import sys

from research_agent.cli import main

if __name__ == "__main__":
    sys.exit(main())

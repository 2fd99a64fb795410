"""Allow running as: python -m presales_research"""

from presales_research.cli import main

main()

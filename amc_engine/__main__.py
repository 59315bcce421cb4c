"""Allow running as: python -m amc_engine"""

from amc_engine.main import main

if __name__ == "__main__":
    main()

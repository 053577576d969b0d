"""python -m minipm 入口"""

from minipm.cli import main

if __name__ == "__main__":
    main()

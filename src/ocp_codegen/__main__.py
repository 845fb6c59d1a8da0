"""Entry point: python -m ocp_codegen"""

from ocp_codegen.cli import main

if __name__ == "__main__":
    main()

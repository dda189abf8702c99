"""Entry point for running vs_tool as a module"""

from vs_tool.cli import main

if __name__ == "__main__":
    main(prog_name="vs-tool")

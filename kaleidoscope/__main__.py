from .repl import main

main(prog_name="kaleidoscope")

from noether.cmdline import main

main()

from osc_display.server import main

main()

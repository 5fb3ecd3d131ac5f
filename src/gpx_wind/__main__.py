from gpx_wind.cli import main

main()

from playlist_bridge.main import main

main()

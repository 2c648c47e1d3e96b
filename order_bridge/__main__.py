from order_bridge.main import main

main()

from pagechat.cli import main

main()

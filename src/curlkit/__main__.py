from curlkit.cli import main

main()

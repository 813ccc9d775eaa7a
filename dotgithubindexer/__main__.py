from dotgithubindexer.cli import main

main()

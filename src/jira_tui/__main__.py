from jira_tui.cli import main

main()

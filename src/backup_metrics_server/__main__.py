from backup_metrics_server.entrypoint import main

main()

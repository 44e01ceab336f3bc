SERVICE_NAME = "mobclaw"

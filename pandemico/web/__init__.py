"""HTTP-вход для Slack вебхуков."""

"""planhook: GitHub pull request webhooks to infrastructure plan jobs."""

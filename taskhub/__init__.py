"""TaskHub: task and category management API."""

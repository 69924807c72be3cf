"""Job allocation and delivery."""

"""PayPal integration: REST client, checkout links and webhook handling."""

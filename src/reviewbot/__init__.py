"""Webhook-driven code review bot for GitHub.

This package receives GitHub webhook deliveries and reports line-level
findings back as check runs, providing:
- Webhook signature verification and event routing
- Concurrent fetch-and-evaluate analysis of a commit's changed files
- A small extensible line-level rule engine
- Check run publication with one annotation per finding
"""

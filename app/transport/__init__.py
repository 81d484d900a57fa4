"""
Transport app: trips published by drivers and requests sent by shippers.

This app handles:
- Trips with available capacity
- Transport requests against a trip
- Request creation, which provisions the per-request chat

Related apps:
    - authentication: Drivers and shippers
    - chat: One chat per transport request
"""

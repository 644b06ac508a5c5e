"""
Application Layer

Contains the use cases that drive the jukebox. This layer orchestrates
domain objects and infrastructure ports to fulfill them.

Structure:
- commands/: Requests and results exchanged with the front-ends
- queries/: Read-only status models
- services/: Resolver, queue engine, presence tracker and the jukebox facade
- interfaces/: Port interfaces for infrastructure adapters
"""

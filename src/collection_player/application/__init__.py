"""
Application Layer

Contains the per-session use cases that drive the domain engine.
This layer orchestrates the position ledger, playback coordinator and
the external collaborators (track store, media backend).

Structure:
- services/: The collection session service
- interfaces/: Port interfaces for infrastructure adapters
"""

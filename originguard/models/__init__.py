"""OriginGuard models package.

Defines the shared contracts between the decision engine and its host:

  - decision.py — ListMode, ResponseMode, FilterResult, Decision, Reason, GuardResult
  - block.py    — BlockResponseWriter and the rejection response emitter
"""

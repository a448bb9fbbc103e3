"""Services layer for ShadowCast.

Services implement business logic and orchestrate data operations.
Organized by feature:
- generator: Lesson text, translations and sentence audio
- storage: Lesson persistence with compensating rollback
- pipeline: Run coordination across series
"""

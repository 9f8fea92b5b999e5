"""Mission Quest: timed multiple-choice mission attempts.

Subpackages:
- models: Questions, rules, attempt state and results
- engine: Clock, selection, economy, gate, narrative and the session controller
- storage: Content sources, result sinks and configuration
"""

__version__ = "0.1.0"

"""Decision-support core for personal health tracking.

This package turns user-entered health data (symptoms, metrics, profile attributes)
into decision artifacts: matched conditions, urgency scores, insights and risk predictions.
Everything here is a pure function of its input snapshot; fetching and persisting data
is left to the surrounding service.
"""

"""
Bulk Graph - Social Recognition Network
=======================================

Members bind a social handle to a device, spend a limited number of votes
recognizing each other, and climb a tiered leaderboard.

Modules:
    - config: Configuration and constants
    - models: Shared data types
    - fingerprint: Device fingerprinting
    - session: Persistent session state
    - store_client: Candidate store (Supabase) wrapper
    - directory: Candidate directory with sample-set fallback
    - voting_queue: Randomized voting queue
    - voting: Vote processing and flow routing
    - leaderboard: Tier classification
    - insights: Generative flavor text
    - engine: Main recognition orchestrator
    - cli: Command-line interface
    - app: Streamlit web app
"""

__version__ = "1.0.0"
__author__ = "Bulk Protocol Team"

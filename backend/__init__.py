"""
Globe Markers Backend - marker graph API for the globe dashboard.

This package provides a FastAPI backend that serves the static marker
dataset, filtered and with statistics recomputed for each request, in the
envelope format expected by the globe frontend.
"""

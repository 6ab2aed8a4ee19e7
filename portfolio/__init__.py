"""Portfolio API - blog, projects and hours tracking on top of Supabase"""

__version__ = "1.0.0"

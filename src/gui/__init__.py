# GUI Package
"""
Job Board Client Front End

Architecture:
- application/: Route guard, auth gateway, job list engine, operational monitor
- presentation/: View models
- main.py: JobBoardApp, the application root
"""

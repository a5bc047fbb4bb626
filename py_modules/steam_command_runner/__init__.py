"""
steam-command-runner: launch Steam games through gamescope, Proton and
pre-commands configured per game, and manage Steam launch options.
"""
__version__ = "0.4.0"

"""SkillPulse CLI - time-boxed personal task tracking."""

__version__ = "0.1.0"

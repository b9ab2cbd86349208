"""Entry point for `python -m audio_overview`.

Delegates to `python -m audio_overview.cli`.
"""
import runpy
runpy.run_module("audio_overview.cli", run_name="__main__", alter_sys=True)

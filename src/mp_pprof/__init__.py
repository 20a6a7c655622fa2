"""
mp_pprof – pprof-style runtime diagnostics for live Python services.

Import path convention::

    from mp_pprof.adapters.fastapi import create_app, FastAPIPProfRouter
    from mp_pprof.inspector import build_inspector, PProfInspector
    from mp_pprof.config.settings import InspectorSettings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]

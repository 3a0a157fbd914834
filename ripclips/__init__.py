# ripclips/__init__.py
"""
Backend de RipClips: envío y moderación de clips (Twitch / YouTube) y el
feed con likes, vistas y ranking "hot".
"""

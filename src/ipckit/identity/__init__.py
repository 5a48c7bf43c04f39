"""
Identity - account creation, funding, identity deployment and profile
registration, composed from the chain layer.
"""

"""
Use Cases

Organized by domain folder:
- device/: Browser and mobile device activation, device sessions
- principal/: Kid and parent principal token minting
- files/: Mobile file listing and presigned transfers
- mobile/: Mobile config discovery

Import from subdirectories.
"""

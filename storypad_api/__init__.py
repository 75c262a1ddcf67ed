"""
StoryPad server: auth REST API and the Socket.IO collaboration relay.
"""

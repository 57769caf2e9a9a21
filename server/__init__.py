# permmap - HTTP routes

"""compose-release: build and publish only the compose packages that changed."""

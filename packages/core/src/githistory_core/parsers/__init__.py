"""Line-oriented parsers for git's plumbing output."""

"""
The MODEL layer holds the decoded frame and the code that reads it from disk.
It has NO knowledge of the VTK output layout.
"""

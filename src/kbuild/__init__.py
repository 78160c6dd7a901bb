"""kbuild - incremental builder for plugin-style native web applications.

kbuild compiles an application's C/C++ sources and embedded static assets
into a single shared library, recompiling only what changed since the last
successful build.
"""

__version__ = "0.1.0"

"""
ptx-builder: build a CUDA device crate into a PTX assembly from a host build script.

It provides:
- Analysis of the device crate (name, library or binary, output location)
- A ``cargo`` invocation for the ``nvptx64-nvidia-cuda`` target
- Resolution of the PTX assembly path and of the source dependencies
- Reporting to ``cargo`` through build script directives

Key modules:
- ptx_builder.builder: Build orchestration
- ptx_builder.output: Artifact resolution
- ptx_builder.source: Crate analysis
- ptx_builder.reporter: Error log and build script directives
"""

__version__ = "0.5.3"

__all__ = (
    '__version__',
)

import logging
import os
import pprint

from setuptools import setup
from setuptools.command.bdist_wheel import bdist_wheel as _bdist_wheel
from setuptools.dist import Distribution


#: Set to ``1`` to compile the hot modules with `mypyc`, see the ``mypyc`` extra.
MYPYC_ENV = 'PTX_BUILDER_MYPYC'

def enable_mypyc(dist: Distribution) -> None:
    """
    Enable `mypyc` as extension modules.

    References:

    * https://mypyc.readthedocs.io/en/latest/getting_started.html#using-setup-py
    """
    from mypyc.build import mypycify

    ext_modules = mypycify(
        [
            'ptx_builder/utils/depfile.py',
            'ptx_builder/utils/subprocess_helpers.py',
        ],
        verbose=True,
        strict_dunder_typing=True,
    )
    logging.info(f'The following mypyc extension modules will be used:\n{pprint.pformat(ext_modules)}')
    dist.ext_modules = ext_modules

class bdist_wheel(_bdist_wheel):
    """
    Compile with `mypyc` when building wheels, if :py:data:`MYPYC_ENV` is set.
    """
    def finalize_options(self) -> None:
        logging.info('Building a built distribution (bdist).')
        if os.environ.get(MYPYC_ENV) == '1':
            enable_mypyc(self.distribution)
            super().finalize_options()
            assert self.root_is_pure is False
        else:
            super().finalize_options()

setup(
    cmdclass={
        "bdist_wheel": bdist_wheel,
    },
)

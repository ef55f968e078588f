from setuptools import setup
from setuptools import find_packages

config = {
    'name' : 'KinTree',
    'version' : '0.1.0',
    'description' : 'Kinematic trees and recursive rigid body algorithms over pluggable array backends',
    'install_requires' : [
        'numpy>=2.0',
        'array_api_compat>=1.9',
        'prettytable',
    ],
    'extras_require' : {
        'pytorch' : ['torch'],
        'jax' : ['jax', 'jaxlib'],
        'test' : ['pytest', 'scipy', 'torch', 'jax', 'jaxlib'],
        'docs' : ['sphinx', 'sphinx-book-theme', 'sphinx-copybutton', 'myst-parser', 'sphinx-autoapi'],
    },
    'python_requires' : '>=3.10',
    'package_dir' : {'' : 'src'},
    'packages' : find_packages('src'),
}

setup(**config)

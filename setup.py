from glob import glob
from setuptools import setup


setup(
    name='scicalc',
    version='0.1.0',
    description='Scientific calculator',
    install_requires=[
        'regex',
        'prompt_toolkit',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
        ],
    },
    packages=['scicalc'],
    package_dir={'': 'src'},
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.7',
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    tests_require=[
        'pytest',
        'pytest-cov',
    ],
    scripts=glob('bin/*'),
    license='ISC',
)

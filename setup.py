"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='noether-types',
	version='0.1.0',
	packages=['noether', "noether.static", ],
	entry_points={
		'console_scripts': ["noether = noether.cmdline:main"],
	},
	license='MIT',
	description='A structural type-relation engine: records, variance, generics, and equi-recursive types',
	long_description=open('README.md', encoding='utf-8').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.10",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Compilers",
		"Topic :: Education",
		"Environment :: Console",
    ],
	python_requires='>=3.10',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
	extras_require={
		"test": ["pytest"],
	},
)

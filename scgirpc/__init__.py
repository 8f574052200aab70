__project_name__ = 'scgirpc'
__description__ = 'XML-RPC over SCGI'
__homepage__ = 'https://github.com/plotski/scgirpc'
__version__ = '2022.03.02alpha2'
__author__ = 'plotski'
__author_email__ = 'plotski@example.org'

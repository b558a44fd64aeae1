import keyword

# Directory used for types declared outside of any namespace
GLOBAL_NAMESPACE_DIR = 'global_'

STUB_FILE_NAME = '__init__.pyi'
MANIFEST_SUFFIX = '.yaml'

NAMESPACE_SEPARATOR = '.'

VALID_TYPE_KINDS = ('class', 'struct', 'interface', 'enum', 'delegate')
VALID_VISIBILITIES = ('public', 'internal')
EXPORTED_VISIBILITY = 'public'

VOID_TYPE_NAME = 'void'
ARRAY_SUFFIX = '[]'

RESERVED_IDENTIFIERS = frozenset(keyword.kwlist)

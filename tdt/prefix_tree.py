"""Trie used to find every registered prefix of an input string.
"""


class _Node(object):
    __slots__ = ['children', 'values']

    def __init__(self):
        self.children = {}
        self.values = []


class PrefixTree(object):
    """Map prefix strings to lists of values.

    >>> tree = PrefixTree()
    >>> tree.insert('urn:epc:id:sgtin', 'SGTIN')
    >>> tree.insert('urn:epc:id', 'EPC')
    >>> tree.search('urn:epc:id:sgtin:0037000.030241.1041970')
    ['EPC', 'SGTIN']
    """

    def __init__(self):
        self._root = _Node()

    def insert(self, prefix, value):
        node = self._root
        for char in prefix:
            node = node.children.setdefault(char, _Node())
        node.values.append(value)

    def search(self, text):
        """Return the values of every inserted prefix of text.

        Values come shortest prefix first, then in insertion order.
        """
        found = []
        node = self._root
        found.extend(node.values)
        for char in text:
            node = node.children.get(char)
            if node is None:
                break
            found.extend(node.values)
        return found

    def longest(self, text):
        """Return the values registered under the longest prefix of text."""
        node = self._root
        best = node.values
        for char in text:
            node = node.children.get(char)
            if node is None:
                break
            if node.values:
                best = node.values
        return list(best)

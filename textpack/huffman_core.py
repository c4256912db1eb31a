# filename: huffman_core.py

import heapq
import itertools
from collections import Counter

from huffman_errors import InvalidInput, InvalidTree


class HuffmanNode:
    def __init__(self, char, freq, left=None, right=None):
        self.char = char
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        return f"HuffmanNode({self.char!r}, {self.freq})"


class HuffmanLogic:
    """Stateless stages of the encoder: count, build, extract.

    Every method takes the previous stage's result and returns a new value,
    so one instance can be shared by any number of documents.
    """

    def count_frequencies(self, data):
        # Single pass over the input symbols
        return Counter(data)

    def build_tree(self, freqs):
        if not freqs:
            raise InvalidInput("cannot build a Huffman tree from an empty frequency table")

        # Heap entries are (weight, sequence, node); the sequence number makes
        # equal weights pop in insertion order, leaves first in symbol order.
        sequence = itertools.count()
        priority_queue = []
        for char in sorted(freqs):
            freq = freqs[char]
            if freq < 1:
                raise InvalidInput(f"symbol {char!r} has non-positive count {freq}")
            priority_queue.append((freq, next(sequence), HuffmanNode(char, freq)))
        heapq.heapify(priority_queue)

        # Iteratively merge nodes to form the binary tree
        while len(priority_queue) > 1:
            _, _, left = heapq.heappop(priority_queue)
            _, _, right = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left.freq + right.freq, left, right)
            heapq.heappush(priority_queue, (merged.freq, next(sequence), merged))

        return priority_queue[0][2]

    def generate_codes(self, node):
        if node is None:
            raise InvalidTree("Huffman tree has no root")
        # A lone leaf still needs one bit per symbol in the packed stream
        if node.is_leaf:
            self._check_leaf(node)
            return {node.char: "0"}
        codes = {}
        self._walk(node, "", codes)
        return codes

    def _walk(self, node, prefix, codes):
        if node.is_leaf:
            self._check_leaf(node)
            if node.char in codes:
                raise InvalidTree(f"symbol {node.char!r} appears in more than one leaf")
            codes[node.char] = prefix
            return
        if node.left is None or node.right is None:
            raise InvalidTree(f"internal node {node!r} has exactly one child")
        self._walk(node.left, prefix + "0", codes)
        self._walk(node.right, prefix + "1", codes)

    def _check_leaf(self, node):
        if node.char is None:
            raise InvalidTree(f"leaf {node!r} carries no symbol")

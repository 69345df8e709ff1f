from collections.abc import Hashable
from typing import Literal
from scipy.sparse import csr_matrix


NodeId = Hashable
EdgeId = Hashable
MatrixMode = Literal["distance", "similarity"]
CSRMatrix = csr_matrix

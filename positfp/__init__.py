from .titanic import utils, ops, conversion, gmpmath
from .arithmetic import evalctx, posit, ndarray

RM = ops.RM
PositCtx = evalctx.PositCtx
posit_ctx = evalctx.posit_ctx
Posit = posit.Posit
P8 = posit.P8

decode = posit.decode
encode = posit.encode
is_nar = posit.is_nar

ZERO = posit.ZERO
ONE = posit.ONE
MINUS_ONE = posit.MINUS_ONE
NAR = posit.NAR
EPSILON = posit.EPSILON
MAX_VALUE = posit.MAX_VALUE

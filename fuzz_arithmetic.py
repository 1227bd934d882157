import math
import random
import re
import string
import warnings

from mathrepl.evaluator import evaluate_line
from mathrepl.symbols import default_symbols
from mathrepl.value import Error, Real

warnings.filterwarnings("ignore")


def eval_py(code: str) -> float | str:
    try:
        return eval(code)
    except Exception as e:
        return str(e)


def eval_my(code: str) -> float | str:
    result = evaluate_line(default_symbols(), code)
    if isinstance(result, Real):
        return result.v
    elif isinstance(result, Error):
        return result.errmsg
    return repr(result)


if __name__ == "__main__":
    alphabet = string.digits + ".()+-*/ "

    def generate(length: int) -> str:
        return "".join(random.choices(alphabet, k=length))

    while True:
        code = generate(10)

        if re.findall(r"\*\s*\*", code):
            continue  # avoid generating powers (10**4)

        if re.findall(r"/\s*/", code):
            continue  # avoid generating int devision (10 // 3)

        if re.findall(r"(?<![0-9])\.", code):
            continue  # literals must start with a digit here (.5)

        res_py = eval_py(code)
        res_my = eval_my(code)
        if isinstance(res_py, (int, float)) and isinstance(res_my, float) and math.isclose(float(res_py), res_my):
            continue
        if not isinstance(res_py, (int, float)) and isinstance(res_my, str):
            continue
        if isinstance(res_py, str) and res_py.startswith("leading zeros in decimal integer literals are not permitted"):
            continue
        print(f"{code!r}\npy: {res_py}\nmy: {res_my}\n\n")

from __future__ import annotations


class PerturbAppError(Exception):
    """perturb_app のドメイン例外の基底。"""

    __responsibility__ = "CLI等の外側で一括捕捉するための共通祖先"


class InvalidConfigurationError(PerturbAppError, ValueError):
    """設定・入力の不備（サンプル数、ε、重み、atol、θ）。処理開始前に送出。"""

    pass


class MaximizerFailureError(PerturbAppError):
    """外部maximizerの例外または不正な戻り値のラップ例外。"""

    __responsibility__ = "外部例外のドメイン例外への変換"

    def __init__(self, message: str, *, sample_index: int | None = None) -> None:
        super().__init__(message)
        self.sample_index = sample_index


class EmptyDistributionError(PerturbAppError, ValueError):
    """原子ゼロの分布に期待値を要求した。"""

    pass


class DegenerateInputError(PerturbAppError, ValueError):
    """正規化が必要な箇所にノルム0のベクトルが渡された。"""

    pass

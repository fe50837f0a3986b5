"""
Window helpers shared by the reports: dense rank, lag and guarded ratios.
"""
import pandas as pd


def _as_list(columns):
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def dense_rank(df, order_by, partition_by=None, ascending=False, name='rank'):
    """
    Return a copy of df with a dense rank of `order_by`, optionally within
    each `partition_by` group.

    Tied values share a rank and the next distinct value gets the next
    integer, so the ranks used have no gaps.
    """
    if df.empty:
        return df.assign(**{name: pd.Series(dtype='int64', index=df.index)})

    partition = _as_list(partition_by)
    if partition:
        ranks = df.groupby(partition, dropna=False)[order_by].rank(method='dense', ascending=ascending)
    else:
        ranks = df[order_by].rank(method='dense', ascending=ascending)

    return df.assign(**{name: ranks.astype('int64')})


def lag(df, value, order_by, partition_by=None, periods=1, name=None):
    """
    Return df sorted by partition then `order_by`, with the value of the
    preceding row of the same partition in a new column (null for the first).
    """
    name = name or f'previous_{value}'
    partition = _as_list(partition_by)
    ordered = df.sort_values(partition + _as_list(order_by), kind='mergesort')

    if partition:
        shifted = ordered.groupby(partition, dropna=False)[value].shift(periods)
    else:
        shifted = ordered[value].shift(periods)

    return ordered.assign(**{name: shifted}).reset_index(drop=True)


def safe_ratio(numerator, denominator, scale=1.0, decimals=2):
    """
    numerator / denominator * scale, rounded.

    Rows whose denominator is zero or missing yield NaN instead of raising
    or producing infinities.
    """
    numerator = pd.Series(numerator).astype('float64')
    denominator = pd.Series(denominator).astype('float64')
    denominator = denominator.where(denominator != 0)
    return (numerator / denominator * scale).round(decimals)

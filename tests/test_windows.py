import math
import pandas as pd
from delivery_analytics.transformation.windows import dense_rank, lag, safe_ratio


def test_dense_rank_ties_share_rank_without_gaps():
    df = pd.DataFrame({'item': ['a', 'b', 'c', 'd'], 'count': [5, 5, 3, 1]})
    ranked = dense_rank(df, 'count')
    assert ranked['rank'].tolist() == [1, 1, 2, 3]


def test_dense_rank_within_partition():
    df = pd.DataFrame({
        'city': ['Mumbai', 'Mumbai', 'Delhi', 'Delhi', 'Delhi'],
        'revenue': [100.0, 200.0, 50.0, 50.0, 10.0],
    })
    ranked = dense_rank(df, 'revenue', partition_by='city')
    assert ranked['rank'].tolist() == [2, 1, 1, 1, 2]


def test_dense_rank_ascending():
    df = pd.DataFrame({'minutes': [30.0, 10.0, 20.0]})
    assert dense_rank(df, 'minutes', ascending=True)['rank'].tolist() == [3, 1, 2]


def test_dense_rank_empty_frame():
    df = pd.DataFrame({'count': pd.Series([], dtype='int64')})
    ranked = dense_rank(df, 'count')
    assert 'rank' in ranked.columns
    assert ranked.empty


def test_dense_rank_does_not_modify_input():
    df = pd.DataFrame({'count': [2, 1]})
    dense_rank(df, 'count')
    assert list(df.columns) == ['count']


def test_lag_orders_and_partitions():
    df = pd.DataFrame({
        'restaurant_id': [1, 2, 1, 1],
        'month': [3, 1, 1, 2],
        'orders': [30, 5, 10, 20],
    })
    result = lag(df, 'orders', order_by='month', partition_by='restaurant_id', name='previous')

    assert result['restaurant_id'].tolist() == [1, 1, 1, 2]
    assert result['month'].tolist() == [1, 2, 3, 1]
    assert math.isnan(result['previous'][0])
    assert result['previous'][1] == 10
    assert result['previous'][2] == 20
    assert math.isnan(result['previous'][3])


def test_lag_without_partition_uses_default_name():
    df = pd.DataFrame({'period': [2, 1], 'total': [200.0, 100.0]})
    result = lag(df, 'total', order_by='period')
    assert result['previous_total'].isna().tolist() == [True, False]
    assert result['previous_total'][1] == 100.0


def test_safe_ratio_zero_denominator_is_null():
    result = safe_ratio(pd.Series([1, 2, 3]), pd.Series([0, 4, 3]), scale=100)
    assert math.isnan(result[0])
    assert result[1] == 50.0
    assert result[2] == 100.0


def test_safe_ratio_missing_denominator_is_null():
    result = safe_ratio(pd.Series([1, 1]), pd.Series([None, 3], dtype='Int64'))
    assert math.isnan(result[0])
    assert result[1] == 0.33


def test_safe_ratio_never_infinite():
    result = safe_ratio(pd.Series([5.0]), pd.Series([0.0]))
    assert not (result == float('inf')).any()

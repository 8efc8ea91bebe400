from strangerconnect.matcher import MatchPolicy, find_match, jaccard_similarity
from strangerconnect.queues import ChatType, Filters, Profile, QueueEntry, normalize_interests


def entry(identity, interests=(), desired=None, profile=None):
    return QueueEntry(
        identity=identity,
        chat_type=ChatType.TEXT,
        interests=normalize_interests(interests),
        desired=desired or Filters(),
        profile=profile or Profile(),
    )


def test_never_matches_self():
    me = entry("a", ["music"])
    assert find_match(me, [me]) is None
    assert find_match(me, [me], MatchPolicy.JACCARD) is None


def test_first_fit_takes_head_of_queue():
    me = entry("me")
    pool = [me, entry("x"), entry("y")]
    assert find_match(me, pool).identity == "x"


def test_interests_need_overlap_when_both_declared():
    me = entry("me", ["Music"])
    pool = [entry("x", ["sports"]), entry("y", ["MUSIC", "travel"])]
    assert find_match(me, pool).identity == "y"


def test_empty_interests_are_an_open_pool():
    assert find_match(entry("me"), [entry("x", ["chess"])]).identity == "x"
    assert find_match(entry("me", ["chess"]), [entry("x")]).identity == "x"


def test_interest_compatibility_is_symmetric():
    a = entry("a", ["music", "art"])
    b = entry("b", ["ART"])
    assert find_match(a, [b]) is b
    assert find_match(b, [a]) is a


def test_desired_filters_with_unknown_profile_are_permissive():
    me = entry("me", desired=Filters.build("us", "female"))
    unknown = entry("x")
    assert find_match(me, [unknown]) is unknown


def test_desired_filters_reject_mismatched_profile():
    me = entry("me", desired=Filters.build(gender="female"))
    pool = [
        entry("x", profile=Profile.build(gender="male")),
        entry("y", profile=Profile.build(gender="Female")),
    ]
    assert find_match(me, pool).identity == "y"


def test_reciprocal_filters():
    me = entry("me", profile=Profile.build(country="de"))
    picky = entry("x", desired=Filters.build(country="us"))
    easy = entry("y", desired=Filters.build(country="de"))
    assert find_match(me, [picky, easy]).identity == "y"


def test_jaccard_prefers_best_overlap():
    me = entry("me", ["music", "travel"])
    pool = [entry("x", ["music", "a", "b"]), entry("y", ["music", "travel"])]
    assert find_match(me, pool, MatchPolicy.JACCARD).identity == "y"


def test_jaccard_ties_go_to_queue_order():
    me = entry("me")
    pool = [entry("x", ["chess"]), entry("y")]
    assert find_match(me, pool, MatchPolicy.JACCARD).identity == "x"


def test_jaccard_similarity():
    assert jaccard_similarity(frozenset({"a", "b"}), frozenset({"b", "c"})) == 1 / 3
    assert jaccard_similarity(frozenset(), frozenset()) == 0.0

from careerprep.utils.utils import resume_hash, strip_html, truncate


def test_resume_hash_ignores_surrounding_whitespace():
    assert resume_hash("  my resume \n") == resume_hash("my resume")
    assert len(resume_hash("my resume")) == 64
    assert resume_hash("a") != resume_hash("b")


def test_truncate_marks_cut_text():
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"
    assert truncate(None, 3) == ""


def test_strip_html():
    assert strip_html("<p>React &amp; Node<br/>Remote</p>") == "React & Node\nRemote"

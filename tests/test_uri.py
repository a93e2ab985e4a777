"""Tests for the URI model, builder and serializer."""

import dataclasses

import pytest

from sipuri import (
    URI,
    EmptyStore,
    HostPortError,
    KeyValuePairs,
    MalformCause,
    MalformedURIError,
    Scheme,
    new,
    parse,
    parse_lazy,
    split_host_port,
)


class TestNew:
    """Test the builder."""

    def test_template(self):
        """Test building the RFC template URI."""
        uri = new(
            "user",
            "host:port",
            password="password",
            params={"uri-parameters": [""]},
            headers={"headers": [""]},
        )
        assert uri.scheme is Scheme.SIP
        assert uri.user == "user"
        assert uri.password == "password"
        assert uri.host == "host:port"
        assert str(uri) == "sip:user:password@host:port;uri-parameters=?headers="

    def test_defaults(self):
        """Test no delimiters are emitted without options."""
        uri = new("alice", "atlanta.com")
        assert str(uri) == "sip:alice@atlanta.com"
        assert isinstance(uri.params, EmptyStore)
        assert isinstance(uri.headers, EmptyStore)
        assert not (uri.had_password or uri.had_params or uri.had_headers)

    def test_supplied_empty_values_keep_delimiters(self):
        """Test supplying an empty value marks the delimiter present."""
        uri = new("alice", "atlanta.com", password="", params={}, headers=KeyValuePairs())
        assert str(uri) == "sip:alice:@atlanta.com;?"

    def test_secure(self):
        """Test upgrading to sips."""
        uri = new("alice", "atlanta.com", secure=True)
        assert uri.is_secure
        assert str(uri) == "sips:alice@atlanta.com"

    def test_escapes_components(self):
        """Test decoded values are escaped when serialized."""
        uri = new("j@s0n", "example.com", params={"display": ["A B"]})
        assert str(uri) == "sip:j%40s0n@example.com;display=A%20B"

    def test_params_sorted(self):
        """Test params serialize in key order separated by ';'."""
        uri = new("bob", "biloxi.com", params={"transport": ["tcp"], "lr": [""], "maddr": ["239.255.255.1"]})
        assert str(uri) == "sip:bob@biloxi.com;lr=;maddr=239.255.255.1;transport=tcp"

    def test_empty_host(self):
        """Test the host is mandatory."""
        with pytest.raises(MalformedURIError) as exc_info:
            new("alice", "")
        assert exc_info.value.cause is MalformCause.MISSING_HOST

    def test_bad_store_type(self):
        """Test params must be a store or mapping."""
        with pytest.raises(TypeError):
            new("alice", "atlanta.com", params=["transport=tcp"])


class TestURI:
    """Test the record itself."""

    def test_frozen(self):
        """Test the record cannot be mutated in place."""
        uri = parse("sip:alice@atlanta.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            uri.user = "bob"

    def test_replace(self):
        """Test a modified copy is built with dataclasses.replace."""
        uri = parse("sip:alice@atlanta.com;transport=tcp")
        moved = dataclasses.replace(uri, host="biloxi.com")
        assert str(moved) == "sip:alice@biloxi.com;transport=tcp"
        assert str(uri) == "sip:alice@atlanta.com;transport=tcp"

    def test_password_sets_flag(self):
        """Test a password implies its delimiter."""
        uri = URI(user="alice", password="secret", host="atlanta.com")
        assert uri.had_password
        assert str(uri) == "sip:alice:secret@atlanta.com"

    def test_none_stores(self):
        """Test missing stores become empty stores."""
        uri = URI(host="atlanta.com", params=None, headers=None)
        assert uri.params.empty()
        assert uri.headers.get("anything") == ""

    def test_to_string(self):
        """Test to_string matches str."""
        uri = parse("sips:alice@atlanta.com?priority=urgent")
        assert uri.to_string() == str(uri) == "sips:alice@atlanta.com?priority=urgent"

    def test_hashable(self):
        """Test equal records hash alike whichever store backs them."""
        assert hash(parse("sip:u@h")) == hash(parse_lazy("sip:u@h"))
        eager = parse("sip:alice@atlanta.com;transport=tcp?subject=hi")
        lazy = parse_lazy("sip:alice@atlanta.com;transport=tcp?subject=hi")
        assert eager == lazy
        assert hash(eager) == hash(lazy)
        assert len({eager, lazy, parse("sip:bob@biloxi.com")}) == 2

    def test_usable_as_key(self):
        """Test records work as dict keys."""
        routes = {parse("sip:alice@atlanta.com"): "pc33"}
        assert routes[new("alice", "atlanta.com")] == "pc33"


class TestTransport:
    """Test transport defaulting (RFC 3261 Section 19.1.2)."""

    @pytest.mark.parametrize(
        "uri, transport",
        [
            ("sip:alice@atlanta.com", "UDP"),
            ("sips:alice@atlanta.com", "TCP"),
            ("sip:alice@atlanta.com;transport=tcp", "TCP"),
            ("sip:alice@atlanta.com;transport=sctp", "SCTP"),
            ("sips:alice@atlanta.com;transport=ws", "WS"),
            ("sip:alice@atlanta.com;transport", "UDP"),
        ],
    )
    def test_transport(self, parse_func, uri, transport):
        assert parse_func(uri).transport == transport


class TestPort:
    """Test port defaulting (RFC 3261 Section 19.1.2)."""

    @pytest.mark.parametrize(
        "uri, port",
        [
            ("sip:alice@atlanta.com", "5060"),
            ("sip:alice@atlanta.com;transport=tcp", "5060"),
            ("sip:alice@atlanta.com;transport=sctp", "5060"),
            ("sip:alice@atlanta.com;transport=tls", "5061"),
            ("sip:alice@atlanta.com;transport=ws", ""),
            ("sips:alice@atlanta.com", "5061"),
            ("sips:alice@atlanta.com;transport=ws", "5061"),
            ("sip:root@136.16.20.100:8001", "8001"),
            ("sips:root@136.16.20.100:8001", "8001"),
            ("sip:[::]", "5060"),
            ("sip:[::]:1111", "1111"),
        ],
    )
    def test_port(self, parse_func, uri, port):
        assert parse_func(uri).port == port

    def test_malformed_constructed_host(self):
        """Test a constructed host that does not split falls back to defaults."""
        assert new("alice", "[::1").port == "5060"


class TestSplitHostPort:
    """Test split_host_port()."""

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("atlanta.com", ("atlanta.com", "")),
            ("atlanta.com:5060", ("atlanta.com", "5060")),
            ("host:port", ("host", "port")),
            ("atlanta.com:", ("atlanta.com", "")),
            ("[::]", ("::", "")),
            ("[::1]", ("::1", "")),
            ("[2001:db8::1:2]", ("2001:db8::1:2", "")),
            ("[::]:1111", ("::", "1111")),
            ("[2001:db8::1:2]:5061", ("2001:db8::1:2", "5061")),
        ],
    )
    def test_split(self, host, expected):
        assert split_host_port(host) == expected

    @pytest.mark.parametrize(
        "host",
        [
            "[::1",
            "[::1]x",
            "[::1]:50:60",
            "[[::1]]",
            "[a:b]",
            "[fe80::1:2]",
            "[fe80::1:2]:5060",
            "a:b:c",
            "a]:5060",
            "::1",
        ],
    )
    def test_malformed(self, host):
        with pytest.raises(HostPortError):
            split_host_port(host)

    def test_method(self):
        """Test the record delegates to split_host_port."""
        assert new("alice", "[::1]:5060").split_host_port() == ("::1", "5060")

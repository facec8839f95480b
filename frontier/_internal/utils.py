import os
import socket

# URL parsing
from urllib3.util import parse_url
from urllib3.exceptions import LocationParseError
# Public suffix list
import tldextract

# Read-only global variables
STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
# Metadata key carrying an IP address already known for the URL.
IP_METADATA_KEY = "ip"

# Only the bundled public suffix snapshot is used, so that computing a
# partition key never goes to the network.
_suffix_extractor = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())

def file_exists(fpath):
    return os.path.exists(fpath)

def run_result(status, reason=""):
    result = {}
    result['Status'] = status
    if reason != '':
        result['Reason'] = reason
    return result

def between(n, left, right):
    return left <= n and n <= right

def is_blank(s):
    return s is None or s.strip() == ""

# extract_host returns the host component of an absolute URL, or None if the
# URL is structurally invalid: it cannot be parsed, has no scheme, or has no
# host.
def extract_host(url):
    if url is None:
        return None
    try:
        parsed = parse_url(url)
    except LocationParseError:
        return None
    if not parsed.scheme or not parsed.host:
        return None
    # parse_url lowercases and IDNA-encodes http(s) hosts, so the key is taken
    # from the URL text itself.
    host = raw_host(url)
    if host == "":
        return None
    return host

# raw_host returns the host of an absolute URL exactly as written: userinfo
# and port are removed, IPv6 literals keep their brackets.
def raw_host(url):
    authority = url.split("://", 1)[-1]
    for sep in "/?#":
        authority = authority.split(sep, 1)[0]
    authority = authority.rpartition("@")[2]
    if authority.startswith("["):
        return authority[:authority.find("]") + 1]
    return authority.split(":", 1)[0]

# registrable_domain reduces a host to its pay-level domain, e.g.
# www.example.co.uk -> example.co.uk. Hosts with no known public suffix (IP
# literals, intranet names) are returned unchanged.
def registrable_domain(host):
    ext = _suffix_extractor(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return host

# resolve_ip performs a blocking DNS lookup and returns the first address
# literal. Raises OSError (socket.gaierror) or UnicodeError on failure.
def resolve_ip(host):
    # IPv6 literals come out of URLs in brackets.
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    infos = socket.getaddrinfo(host, None)
    return infos[0][4][0]

def cache_urls(cache, key, urls):
    if cache.get(key) == None:
        cache[key] = []
    cache[key].extend(urls)

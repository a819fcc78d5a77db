"""Resolve a domain name with Google's DNS-over-HTTPS API"""
import sys

import rested


class Query(rested.Representation):
    wrapper = rested.JSON("application/x-javascript")

    @property
    def question(self):
        return self.value["Question"]

    @property
    def answer(self):
        return self.value.get("Answer", [])


def resolve(name, type="A"):
    with rested.Resource.open("https://dns.google/resolve") as resolver:
        query = resolver.get(Query, name=name, type=type)
        return [record["data"] for record in query.answer]


if __name__ == "__main__":
    for address in resolve(*sys.argv[1:]):
        print(address)

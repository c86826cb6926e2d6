#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
APT transport for S3 compatible object storage (AWS S3, Cloudflare R2)
"""

import urllib.parse

from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aptrepo.config import PublishConfig
from aptrepo.exceptions import UploadError
from aptrepo.transport.base import URIMismatchError, RemoteObject
from aptrepo.transport.transport import Transport


class S3(Transport):
    """
    APT transport for S3 compatible object storage.

    Objects are written with a single PUT, so the ETag the store reports
    is the MD5 of the content and can be compared with local files.
    """
    bucket: str
    prefix: str

    def __init__(self, bucket: str, prefix: str = '', client=None):
        self.bucket = bucket
        self.prefix = prefix.strip('/')
        self.client = client if client is not None else boto3.client('s3')

    @classmethod
    def from_config(cls, config: PublishConfig) -> 'S3':
        """
        Builds a transport for an s3://bucket/prefix URI

        :param PublishConfig config:
        :return S3:
        """
        url: urllib.parse.ParseResult = urllib.parse.urlparse(config.uri)

        if url.scheme != 's3' or not url.netloc:
            raise URIMismatchError("Scheme must be s3://bucket/")

        client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
        )

        return cls(url.netloc, url.path, client)

    def _key(self, key: str) -> str:
        return '{0}/{1}'.format(self.prefix, key) if self.prefix else key

    def _relative(self, key: str) -> Optional[str]:
        if not self.prefix:
            return key

        if not key.startswith(self.prefix + '/'):
            return None

        return key[len(self.prefix) + 1:]

    def list_objects(self) -> Dict[str, RemoteObject]:
        objects = {}
        paginator = self.client.get_paginator('list_objects_v2')
        arguments = {'Bucket': self.bucket}

        if self.prefix:
            arguments['Prefix'] = self.prefix + '/'

        try:
            for page in paginator.paginate(**arguments):
                for item in page.get('Contents', []):
                    key = self._relative(item['Key'])

                    if not key:
                        continue

                    objects[key] = RemoteObject(key, int(item['Size']), item.get('ETag', '').strip('"') or None)
        except (BotoCoreError, ClientError) as ex:
            raise UploadError('s3://{0}/{1}'.format(self.bucket, self.prefix), str(ex)) from ex

        return objects

    def upload(self, source: str, key: str, content_type: str) -> None:
        try:
            with open(source, 'rb') as body:
                self.client.put_object(
                    Bucket=self.bucket,
                    Key=self._key(key),
                    Body=body,
                    ContentType=content_type,
                )
        except (OSError, BotoCoreError, ClientError) as ex:
            raise UploadError(key, str(ex)) from ex

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=self._key(key))
        except (BotoCoreError, ClientError) as ex:
            raise UploadError(key, str(ex)) from ex

    def __repr__(self) -> str:
        return '<aptrepo.transports.S3 s3://{0}/{1}>'.format(self.bucket, self.prefix)
